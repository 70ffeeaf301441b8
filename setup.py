from setuptools import setup, find_packages

setup(
    name="canvas-bridge",
    version="0.1.0",
    packages=find_packages(include=["canvas_bridge*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.28.0",
        "mcp>=1.2.0,<2",
        "pydantic>=2.6.0",
        "anyio>=4.0.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "canvas-bridge=canvas_bridge.cli:main",
        ],
    },
)
