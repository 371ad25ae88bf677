"""
llmdb - Catalog of LLM providers and models

This setup.py file is the package configuration; pip install -e . works
directly for development.
"""

from setuptools import find_packages, setup

if __name__ == "__main__":
    setup(
        name="llmdb",
        version="0.3.0",
        description="Layered, filterable catalog of LLM providers and models with spec resolution.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        package_dir={"": "src"},
        packages=find_packages(where="src", include=["llmdb", "llmdb.*"]),
        python_requires=">=3.11",
        install_requires=[
            "pydantic>=2.7.0",
            "PyYAML>=6.0.1",
            "requests>=2.32.0",
        ],
        extras_require={
            "test": [
                "pytest>=8.0.0",
            ],
        },
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Scientific/Engineering :: Artificial Intelligence",
        ],
    )
