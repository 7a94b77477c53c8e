from setuptools import setup, find_packages

setup(
    name='dao-sdk',
    version='0.1.0',
    description='Python SDK for the DAO program - instruction encoding and transaction assembly',
    author='DAO SDK Team',
    packages=find_packages(exclude=['tests', 'tests.*', 'examples']),
    install_requires=[
        'base58>=2.1.1',
        'pynacl>=1.5.0',
        'httpx>=0.25.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
