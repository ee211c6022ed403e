# setup.py
from setuptools import find_packages, setup

setup(
    name="zscheme",
    version="0.1.0",
    description="Reader and hygienic syntax-rules front end for an R5RS Scheme subset",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pygls>=1.1,<2",
        "lsprotocol",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": [
            "zscheme-ls = zscheme_lsp.server:main",
        ],
    },
    zip_safe=False,
)
