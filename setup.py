"""Setup script for deploykit-cli."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the version from __version__.py
version_dict = {}
with open("deploykit_cli/__version__.py") as f:
    exec(f.read(), version_dict)

VERSION = version_dict["__version__"]

# Read the long description from README
README = Path("README.md").read_text(encoding="utf-8")

setup(
    name="deploykit-cli",
    version=VERSION,
    author="AOSC Developers",
    description="Terminal front end for the Deploykit installation daemon",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "loguru>=0.7.0",
        "aiohttp>=3.9.0",
        "InquirerPy>=0.3.4",
        "prompt_toolkit>=3.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        # dbus-python builds against libdbus; live images ship it as a distro package
        "dbus": [
            "dbus-python>=1.3.2",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "pytest-mock>=3.10.0",
            "ruff>=0.1.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "deploykit-cli=deploykit_cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "Topic :: System :: Installation/Setup",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
    ],
    keywords="installer aosc deploykit dbus",
    include_package_data=True,
    package_data={
        "deploykit_cli": [
            "data/*.json",
        ],
    },
)
