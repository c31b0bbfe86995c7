from setuptools import setup, find_namespace_packages

setup(
    name="retail-layout-engine",
    version="0.1.0",
    packages=find_namespace_packages(include=["backend", "backend.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "shapely",
        "matplotlib",
        "seaborn",
        "pydantic>=2",
        "fastapi",
        "uvicorn",
        "openai",
        "python-dotenv"
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx"
        ]
    }
)
