"""
Setup configuration for SERVICE_LIFETIMES package.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="service-lifetimes",
    version="0.1.0",
    description="Singleton, scoped and transient service lifetimes in a web request pipeline",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "service_lifetimes.web": ["templates/*.html", "static/*.css"],
    },
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.108.0",
        "starlette>=0.29.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.2.0",
        "jinja2>=3.1.0",
        "click>=8.0.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "service-lifetimes=service_lifetimes.cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="dependency injection lifetimes singleton scoped transient fastapi",
    include_package_data=True,
)
