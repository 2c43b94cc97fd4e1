from setuptools import setup, find_packages

setup(
    name="habitat-client",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "semantic-version>=2.10",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "pytest-httpx>=0.30",
        ],
    },
    entry_points={
        "console_scripts": [
            "habitat-client=habitat_client.cli:main",
        ],
    },
    description="Async Python interface to the Habitat hab binary and supervisor API.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.10",
)
