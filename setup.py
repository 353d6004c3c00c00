from setuptools import (
    find_packages,
    setup,
)

setup(
    name="cdeclgen",
    version="0.3.0",
    description="Generate C, C++ and Cython declarations from language-agnostic function descriptions",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(include=["cdeclgen", "cdeclgen.*"]),
    install_requires=[
        "click>=8.0",
        "pycparser>=2.21",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cdeclgen=cdeclgen:cli",
        ],
    },
)
