"""Credential Core Meta information.
   Credential Core hashes passwords, signs account tokens and seals
   tenant secrets for the account backend.
"""
__title__ = 'credential_core'
__description__ = (
   'Password hashing, signed account tokens and sealed tenant secrets '
   'for the account backend.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 SPSyncPro'
__author__ = 'SPSyncPro'
__author_email__ = 'dev@spsyncpro.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/spsyncpro/credential-core'
