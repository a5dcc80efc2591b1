from setuptools import setup, find_packages
from pathlib import Path

package_name = 'nodepool-ingress-operator'
description = (
    'A Kubernetes Operator for deploying NGINX ingress controllers into '
    'the node pools of an OpenYurt cluster.'
)
author = 'The OpenYurt Authors'
license = 'Apache-2.0'
url = 'https://github.com/openyurtio/yurt-app-manager'
pypi_classifiers = [
    'Development Status :: 4 - Beta',
    'License :: OSI Approved :: Apache Software License',
    'Programming Language :: Python :: 3.10',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
]
keywords = ['openyurt', 'kubernetes', 'ingress', 'kopf']
readme = Path(__file__).parent / 'README.rst'

# Core dependencies
install_requires = [
    'kopf>=1.36',
    'kubernetes>=28.1.0',
    'structlog>=23.1.0',
]

# Test dependencies
tests_require = [
    'pytest>=7.0',
    'PyYAML>=6.0',
]
tests_require += install_requires

# Optional dependencies (like for dev)
extras_require = {
    'test': tests_require,
    # For development environments
    'dev': tests_require,
}

setup(
    name=package_name,
    version='0.1.0',
    description=description,
    long_description=readme.read_text(),
    long_description_content_type='text/x-rst',
    author=author,
    url=url,
    license=license,
    classifiers=pypi_classifiers,
    keywords=keywords,
    package_dir={'': 'src'},
    packages=find_packages('src', exclude=['tests']),
    python_requires='>=3.10',
    install_requires=install_requires,
    extras_require=extras_require,
    include_package_data=True,
)
