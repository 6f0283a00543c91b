"""Install the site accounts panel."""

from setuptools import setup, find_packages

setup(
    name='siteaccounts',
    version='0.1.0',
    packages=find_packages(exclude=['*tests*']),
    package_data={'siteaccounts': ['templates/siteaccounts/*.html']},
    py_modules=['wsgi'],
    install_requires=[
        "flask",
        "werkzeug",
        "requests",
        "cryptography",
        "python-json-logger>=3.1",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
        ],
    },
    zip_safe=False
)
