"""Install the QA monitor accounts service."""

from setuptools import setup, find_packages

setup(
    name='qa-accounts',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "wtforms",
        "email-validator>=2.0",
        "pyjwt",
        "bcrypt",
        "pytz",
        "python-json-logger",
        "click",
        "requests",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
        ]
    },
    entry_points={
        'console_scripts': [
            'qa-accounts=qa_accounts.cli:cli',
        ]
    },
    zip_safe=False
)
