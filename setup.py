"""
Setup script для imagination-tools библиотеки
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="imagination-tools",
    version="1.0.0",
    author="hrom-in-space",
    description="Thin helpers for Google Cloud Pub/Sub, Cloud Storage and CloudEvents",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "google-cloud-pubsub>=2.18.0",
        "google-cloud-storage>=2.10.0",
        "cloudevents>=1.9.0,<2",
        "fastavro>=1.8.0",
        "pydantic>=2.6.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.7.0",
            "flake8>=6.1.0",
        ]
    },
    include_package_data=True,
    zip_safe=False,
)
