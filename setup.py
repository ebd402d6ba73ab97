#!/usr/bin/env python3
"""Setup script for library-reconcile."""

from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent


def read_requirements(name: str) -> list:
    """Return the requirement lines of ``name``, without comments."""
    lines = (HERE / name).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="library-reconcile",
    version="1.0.0",
    description="Find missing tracks and copy ratings between music libraries",
    long_description=(HERE / "README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=read_requirements("requirements.txt"),
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={
        "console_scripts": ["library-reconcile=library_reconcile.cli.main:cli"],
    },
    classifiers=[
        "Environment :: Console",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Sound/Audio",
    ],
)
