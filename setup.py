from setuptools import setup

MODULES = [
    'api_server',
    'calc_engine',
    'calc_errors',
    'calc_lexer',
    'calc_parser',
    'config',
    'constants',
    'datetime_evaluator',
    'domain_evaluators',
    'network_evaluator',
    'percentage_evaluator',
    'reference_adjuster',
    'result_formatter',
    'units_evaluator',
]

setup(
    name='SmartCalc',
    version='1.0.0',
    description='Live line calculator engine with references, currency, dates and subnets',
    py_modules=MODULES,
    python_requires='>=3.9',
    install_requires=[
        'fastapi',
        'pydantic>=2',
        'uvicorn',
        'pint',
        'requests',
        'tzdata',
    ],
    extras_require={
        'test': ['pytest', 'httpx'],
    },
)
