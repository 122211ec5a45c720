#!/usr/bin/env python3
"""
Setup script for Levine Links.
"""

from setuptools import setup, find_namespace_packages

setup(
    name="levine-links",
    version="0.1.0",
    author="Levine Links Team",
    description="Wraps forwarded newsletters with resolved links, summaries and archive links",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["levine_links", "levine_links.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.2",
        "python-dateutil>=2.8.2",
        "pyyaml>=6.0.1",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "levine-links=levine_links.main:main",
        ],
    },
)
