#!/usr/bin/env python3
"""
Setup script for the netcup DDNS package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="netcup-ddns",
    version="1.0.0",
    author="netcup DDNS Team",
    author_email="team@example.com",
    description="Dynamic DNS updater for domains hosted at netcup",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/example/netcup-ddns",
    packages=find_packages(include=["netcup_ddns", "netcup_ddns.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Internet :: Name Service (DNS)",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["behave>=1.2.6"],
    },
    entry_points={
        "console_scripts": [
            "netcup-ddns=netcup_ddns.cli.main:main",
        ],
    },
)
