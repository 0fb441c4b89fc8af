from setuptools import setup, find_namespace_packages

setup(
    name='atmfjstc-zip-scan',
    version='0.1.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['atmfjstc', 'atmfjstc.*']),

    install_requires=[
        'termcolor>=1, <3',
        'colorama>=0.4.6, <2',
    ],

    extras_require={
        'test': [
            'pytest>=6',
        ],
    },

    entry_points={
        'console_scripts': [
            'zip-scan=atmfjstc.lib.zip_scan.cli:main_entry_point',
        ],
    },

    zip_safe=True,

    description="Sequential scanner and decoder for the local file headers of ZIP archives held in memory",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.8',
)
