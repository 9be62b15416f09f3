from setuptools import find_packages, setup

setup(
    name="tibber_exporter",
    version="0.1.0",
    description="Expose Tibber Pulse smart meter readings as Prometheus metrics",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.24.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "tibber-exporter=tibber_exporter.cli:main",
        ],
    },
    python_requires=">=3.10",
)
