from setuptools import setup, find_packages

def get_requirements_from_file(filepath):
    with open(filepath, 'r') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name='tradetracker',
    version='0.2.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['scripts'],
    package_data={'tradetracker': ['log_config.yaml']},
    python_requires='>=3.8',
    install_requires=get_requirements_from_file('requirements.txt'),
    extras_require={
        'test': ['pytest'],
    },
    entry_points='''
        [console_scripts]
        tracker=scripts:tracker
    '''
)
