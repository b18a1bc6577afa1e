from setuptools import setup, find_packages
setup(
    name='autosettings',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    include_package_data=True,
    package_data={
        'autosettings': [
            'config/*.ini',
        ],
    },
    description='Shared and capability-triggered settings for multi-unit builds.',
    author='Your Name',
    author_email='youremail@example.com',
    python_requires='>=3.8',
    install_requires=[
        'invoke>=2.0.0',
        'pyyaml>=6.0',
        'pydantic>=2.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'autosettings = autosettings.tasks:main',
        ],
        'pytest11': [
            'autosettings = autosettings.pytest_plugin',
        ],
    },
)
