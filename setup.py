"""
Setup script for the Flight Delay Report project.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="flight-delay-report",
    version="1.0.0",
    description="Deterministic cleaning and feature preparation for NYC flight delay models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Flight Crew Team",
    author_email="team@example.com",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-cov>=4.1.0",
            "black>=23.12.1",
            "flake8>=6.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "flight-ingest=preprocessing.data_ingestion:main",
            "flight-clean=preprocessing.data_cleaner:main",
            "flight-features=features.feature_engineering:main",
            "flight-pipeline=pipeline.run_pipeline:main",
            "flight-train-linear=models.train_linear_regression:main",
            "flight-train-logistic=models.train_logistic_regression:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="data-cleaning imputation pandas pyspark flight-delay",
)
