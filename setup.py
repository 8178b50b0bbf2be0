from setuptools import setup, find_packages

setup(
    name='paketboot',
    version='0.1.0',
    description='Resolves, downloads and caches the latest paket.exe',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'requests',
        'urllib3',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest<9',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'paketboot=paketboot.cli:main',
        ],
    },
)
