#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Setup script for xdrfile
"""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Basic requirements
install_requires = [
    "numpy>=1.19.0",
    "pyyaml>=5.0",  # Required for ~/.xdrfile/config.yaml
]

extras_require = {
    "test": [
        "pytest>=6.0",
    ],
}

setup(
    name="xdrfile",
    version="0.3.0",
    author="xdrfile Development Team",
    author_email="",
    description="Read and write GROMACS XTC and TRR trajectories through libxdrfile",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Chemistry",
        "License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    zip_safe=False,  # ctypes loads the shared library at runtime
)
