"""
Setup script for pdfstructx.

This script configures the package for installation via pip.
Supports both development and production installations.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

setup(
    name="pdfstructx",
    version="1.0.0",
    description="Recover chapters, back-of-book index entries and reading order from PDF pages",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="pdfstructx Contributors",
    author_email="",
    packages=find_packages(include=["pdfstructx", "pdfstructx.*"]),
    install_requires=[
        "pypdf>=3.17.0",
        "click>=8.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pdfstructx=pdfstructx.cli:cli",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Text Processing :: Indexing",
        "Topic :: Utilities",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    keywords="pdf outline bookmarks chapters index reading-order page-labels",
    license="MIT",
    include_package_data=True,
    zip_safe=False,
)
