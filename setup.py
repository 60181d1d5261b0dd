"""
gencode - Database-driven Spring Boot / MyBatis-Plus code generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="gencode",
    version="1.0.0",
    author="gencode contributors",
    author_email="",
    description="Generate Spring Boot / MyBatis-Plus backends from a database schema",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={
        "gencode": [
            "templates/*.tpl",
            "templates/*/*.tpl",
            "templates/*/*/*.tpl",
            "templates/*/*/*/*.tpl",
        ],
    },
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "jinja2>=3.1.0",
        "sqlalchemy>=2.0.0",
        "pyyaml>=6.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.20.0",
    ],
    extras_require={
        "mysql": [
            "pymysql>=1.0.0",
        ],
        "postgresql": [
            "psycopg2-binary>=2.9.0",
        ],
        "dev": [
            "pytest>=7.0",
            "httpx>=0.24.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gencode=gencode.cli:cli_main",
            "gencode-server=gencode.server:main",
        ],
    },
    keywords="code-generator, spring-boot, mybatis-plus, jinja2, sqlalchemy, schema",
)
