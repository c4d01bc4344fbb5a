from setuptools import setup, find_packages

setup(
    name="noodleseed-mcp-server",
    version="2.0.0",
    description="NoodleSeed MCP widget catalog server over HTTP+SSE",
    author="NoodleSeed Developer",
    python_requires=">=3.11",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9.0",
        "aiofiles>=23.2.0",
        "pydantic>=2.5.0",
        "python-dotenv>=1.0.0",
        "orjson>=3.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "noodleseed-server=noodleseed_mcp.mcp.server:main",
        ],
    },
)
