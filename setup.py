"""
git-commit-m セットアップスクリプト
"""

from setuptools import setup, find_packages
from pathlib import Path

# README.mdの内容を読み込み
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8') if (this_directory / "README.md").exists() else ""

setup(
    name="git-commit-m",
    version="1.0.0",
    author="git-commit-m contributors",
    description="Generate commit messages with an AI CLI tool and commit staged changes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="git-commit-m"),
    package_dir={"": "git-commit-m"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Version Control :: Git",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0.1",
        "colorlog>=6.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-mock>=3.11.1",
            "pytest-cov>=4.1.0",
            "black>=23.7.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "git-commit-m=git_commit_m.main:main",
        ],
    },
    zip_safe=False,
)
