from setuptools import setup, find_packages

setup(
    name='atmfjstc-ar-file',
    version='0.1.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_packages(where='src'),

    install_requires=[
        'atmfjstc-binary-utils>=1.2.0, <2',
        'atmfjstc-cli-utils>=1.8.0, <2',
        'atmfjstc-iso-timestamp>=1.1.0, <2',
        'atmfjstc-os-forensics>=0.2.1, <2',
    ],

    extras_require={
        'test': [
            'pytest',
        ],
    },

    zip_safe=True,

    description="Lazy reader for the member headers of Unix ar archives",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
