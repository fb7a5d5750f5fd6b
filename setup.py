#!/usr/bin/env python3
"""
Setup script for the Rakuten AI streaming client
"""

from setuptools import setup, find_packages
import os

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Get version from environment or default
version = os.getenv("VERSION", "0.1.0")

setup(
    name="rakuten-ai-sdk",
    version=version,
    author="Rakuten AI SDK Contributors",
    author_email="contributors@example.com",
    description="Streaming websocket client for the Rakuten AI chat backend",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Chat",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Framework :: AsyncIO",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.11",
    install_requires=[
        "websockets>=14.0",
        "httpx>=0.27.0",
        "pydantic>=2.4.0",
        "typing_extensions>=4.13.2",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.0.0",
            "mypy>=1.15.0",
            "ruff>=0.4.4",
        ],
    },
    include_package_data=True,
    package_data={
        "": ["*.md"],
    },
    keywords=[
        "rakuten",
        "ai",
        "chat",
        "websocket",
        "streaming",
        "asyncio",
    ],
    zip_safe=False,
)
