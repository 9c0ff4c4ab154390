from setuptools import setup, find_packages

setup(
    name='isostream',
    description='Patch spans of large binary images, such as the Ignition embed area of CoreOS live ISOs, while streaming them.',
    version='0.1.0',
    python_requires='>=3.8',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'sortedcontainers>=2.0',
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["isostream=isostream.__main__:main"],
    },
)
