#!/usr/bin/env python3
"""
Setup configuration for the albumfix package.

Installs the pipeline and remediators packages plus the albumfix.py script
as the `albumfix` command.

Install in development mode: pip install -e .[test]
"""

from pathlib import Path
from setuptools import setup, find_packages

HERE = Path(__file__).parent


def read_requirements(name="requirements.txt"):
    """Requirement lines from a pip requirements file, minus comments and options"""
    path = HERE / name
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        lines = (line.strip() for line in f)
        return [line for line in lines if line and not line.startswith(("#", "-"))]


readme_file = HERE / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="albumfix",
    version="1.0.0",
    description="Write Google Photos takeout sidecar metadata back into photos and videos",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pipeline", "pipeline.*", "remediators", "remediators.*"]),
    py_modules=["albumfix"],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "albumfix=albumfix:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Multimedia :: Video",
        "Topic :: System :: Archiving",
    ],
    keywords="google-photos takeout exif exiftool sidecar metadata",
)
