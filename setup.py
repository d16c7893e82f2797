"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/starship-os/starship-build"
KEYWORDS = "operating-system microkernel l4re fiasco build orchestrator cross-compile qemu"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="starship-build",
        version="0.1.0",
        description="Build orchestrator for the Starship OS",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src", include=["starship", "starship.*"]),
        package_data={
            "starship": [
                "resources/*.properties",
                "resources/configs/*",
            ]
        },
        include_package_data=True,
        install_requires=[
            "psutil",
            "requests",
            "tqdm",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "starship=starship.cli:main",
            ],
        },
    )
