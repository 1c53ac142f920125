# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="treesync4ai",
    version="1.0.0",
    description="Editor conversacional de un árbol de ficheros virtual sincronizado con GitHub",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["treesync4ai*"]),
    package_data={
        "treesync4ai.interface": ["locales/*.json"],
        "treesync4ai.interface.locales": ["*.json"],
    },
    include_package_data=True,
    install_requires=[
        "requests>=2.28",
        "urllib3>=1.26",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'treesync4ai=treesync4ai.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
