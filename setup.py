#!/usr/bin/env python3
"""
Setup script for Chess Puzzle Engine.

A terminal trainer that serves tactical chess puzzles from a fixed corpus,
checks solver moves against each solution line and tracks a puzzle rating.
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8') if (this_directory / "README.md").exists() else ""

# Read version from package
version_file = this_directory / "chess_puzzle_engine" / "__init__.py"
version = "0.3.0"  # Default version
if version_file.exists():
    with open(version_file, encoding='utf-8') as f:
        for line in f:
            if line.startswith('__version__'):
                version = line.split('=')[1].strip().strip('"').strip("'")
                break

setup(
    name="chess-puzzle-engine",
    version=version,
    description="Tactical chess puzzle trainer with rating, rush, survival and themed modes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Chess Puzzle Engine Team",

    # Package discovery
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",

    # Dependencies
    install_requires=[
        "chess>=1.10",
        "rich>=13.0.0",
        "python-dotenv>=1.0.0",
    ],

    # Optional dependencies
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "mypy>=1.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "isort>=5.0.0",
        ],
    },

    # Entry points for CLI
    entry_points={
        "console_scripts": [
            "chess-puzzles=chess_puzzle_engine.cli:main",
        ],
    },

    # Package data
    include_package_data=True,
    package_data={
        "chess_puzzle_engine": ["data/*.json"],
    },

    # Classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Games/Entertainment :: Board Games",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],

    keywords=[
        "chess",
        "puzzles",
        "tactics",
        "elo",
        "rating",
        "lichess",
        "training",
    ],

    zip_safe=False,
)
