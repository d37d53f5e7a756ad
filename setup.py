from setuptools import find_packages, setup

setup(
    name='canvasform',
    version='0.1',
    py_modules=['canvasform'],
    packages=find_packages(include=['exporter', 'exporter.*']),
    install_requires=[
        'Click',
        'python-hcl2',
        'PyYAML',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points='''
        [console_scripts]
        canvasform=canvasform:cli
    ''',
)
