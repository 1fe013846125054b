"""
Setup script for procap-notebooks.

procap-notebooks is the question-notebook engine of the procap study
platform:

1. Three-strike answering with progressive hints and XP
2. Idempotent answer persistence on SQL or Supabase tables
3. Leaderboards, notebook progress and per-question statistics

The 'procap' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="procap-notebooks",
    version="1.0.0",
    description="Question notebooks with three-strike scoring, XP and achievements",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="procap",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Hosted backend
        "supabase>=2.0.0",
        "postgrest>=0.13.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "procap=src.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="questions quiz notebooks gamification cli education",
)
