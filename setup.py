from setuptools import setup, find_packages


setup(
    name="loaf",
    version="0.1",
    packages=find_packages(include=["loaf", "loaf.*"]),
    description="Single-line, self-validating archives: tar + gzip + hex behind a SHA-256 envelope.",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
        "rich>=13.0.0",
    ],
    entry_points={
        "console_scripts": [
            "loaf=loaf.cli:main",
        ]
    },
)
