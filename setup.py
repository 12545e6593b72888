"""Setup script for the hyperbolic random graph generators."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Read requirements
requirements_path = Path(__file__).parent / "requirements.txt"
if requirements_path.exists():
    with open(requirements_path, "r", encoding="utf-8") as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith("#")
        ]
else:
    requirements = []

setup(
    name="hyperbolic_random_graphs",
    version="0.1.0",
    description="Static and dynamic hyperbolic random graph generators with a polar quadtree index",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Scientific/Engineering :: Mathematics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    # Code imports the package as ``src``, alongside ``config`` and ``experiments``
    packages=find_packages(include=["src", "src.*", "config", "experiments"]),
    package_data={"config": ["*.yaml"]},
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4",
            "pytest-cov>=4.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "hrg-static=experiments.run_static_generation:main",
            "hrg-dynamic=experiments.run_dynamic_generation:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
