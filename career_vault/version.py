"""Career Vault Meta information.
   Career Vault encrypts personal fields of career documents at rest.
"""
__title__ = 'career_vault'
__description__ = (
   'Career Vault encrypts personal fields of cover letters, resumes '
   'and profiles before they reach the database.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/career-vault'
