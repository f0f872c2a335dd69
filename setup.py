from __future__ import annotations

from setuptools import find_packages, setup

setup(
    name="txflow",
    version="0.1.0",
    description="Transaction lifecycle orchestrator for streaming, treasury and multisig operations",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["txflow", "txflow.*"]),
    python_requires=">=3.9",
    install_requires=[
        "anyio>=4.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "PyYAML",
        "tenacity",
        "httpx",
        "SQLAlchemy[asyncio]>=2.0",
        "aiosqlite",
        "fastapi",
        "hypercorn",
        "eth-account",
        "web3",
        "typing_extensions",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "txflow = txflow.run:run",
        ],
    },
)
