from setuptools import setup, find_packages
setup(
    name="homeowner-lookup",
    version="0.0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    install_requires=[
        "fastapi",
        "httpx",
        "pydantic>=2.6",
        "uvicorn",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'homeowner_lookup=homeowner_lookup.__main__:main'
        ]
    }
)
