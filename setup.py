from setuptools import setup, find_packages

setup(
    name="platformq-settlement",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "web3>=6.5.0",
        "eth-account>=0.9.0",
        "eth-utils>=2.1.0",
        "eth-abi>=4.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "click",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "platformq-settlement = platformq_settlement.cli:cli",
        ],
    },
    python_requires=">=3.8",
    author="PlatformQ Team",
    description="Signed lazy-mint and resale settlement for PlatformQ digital assets",
)
