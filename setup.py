#!/usr/bin/env python3
"""
appicons Setup Script
Installs the icon extractor package and its command line entry point
"""

from pathlib import Path

from setuptools import find_packages, setup


def read_requirements(root: Path):
    """Runtime dependencies listed in requirements.txt"""
    requirements = root / 'requirements.txt'
    if not requirements.exists():
        return []
    with open(requirements, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


root = Path(__file__).parent.resolve()

setup(
    name='appicons',
    version='1.0.0',
    description='Extract macOS application icons as high-resolution PNG files',
    packages=find_packages(include=['appicons', 'appicons.*']),
    python_requires='>=3.8',
    install_requires=read_requirements(root),
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'extract-app-icons=appicons.cli:main',
        ],
    },
)
