#!/usr/bin/env python3
"""
Setup script for the Workforce Planning model
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="workforce-planning",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Healthcare workforce supply/demand projection model with scenario management",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/workforce-planning",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["project_workforce"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "ui": [
            "streamlit>=1.28.0",
            "plotly>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "project-workforce=project_workforce:main",
        ],
    },
    include_package_data=True,
    package_data={
        "": ["*.json", "*.yaml", "*.yml"],
    },
)
