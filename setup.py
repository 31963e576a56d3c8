"""
Setup script for the Boundary Chooser package.
"""

from setuptools import setup, find_packages

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Separate development requirements
dev_requirements = [req for req in requirements if any(dev in req for dev in ["pytest", "black", "flake8", "mypy"])]
install_requirements = [req for req in requirements if req not in dev_requirements]

setup(
    name="boundary-chooser",
    version="1.0.0",
    author="Data Analytics Team",
    description="State, LGA and Ward boundary indexing for an interactive boundary chooser",
    long_description="Boundary Chooser - loads State/LGA/Ward GeoJSON boundaries, builds the parent/child lookup indices behind the chooser UI, and reconciles senatorial district tables against canonical LGA names.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=install_requirements,
    extras_require={
        "dev": dev_requirements,
        "test": [req for req in dev_requirements if "pytest" in req],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "boundary-chooser=main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
