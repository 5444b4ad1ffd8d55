from setuptools import setup, find_namespace_packages

setup(
    name="menuselect",
    version="1.0.0",
    description="Hierarchical tri-state menu selection and role assignment client",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["menuselect*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'menuselect=menuselect.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
