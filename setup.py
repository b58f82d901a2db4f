#!/usr/bin/env python3
"""
Setup configuration for SongFinder
Lyrics search service with web search extraction and lookup fallback
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "requests>=2.31.0",
    "lyricsgenius>=3.0.1",
    "flask>=2.3.0",
    "werkzeug>=2.3.0",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
]

setup(
    name="songfinder",
    version="1.0.0",
    author="SongFinder Team",
    description="Lyrics search with web search extraction and lookup fallback",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Framework :: Flask",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
        "Topic :: Text Processing",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "songfinder=songfinder.main:cli",
        ],
    },
    include_package_data=True,
    keywords="lyrics search worship songs firecrawl genius flask cli",
)
