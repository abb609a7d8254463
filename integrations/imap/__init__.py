"""IMAP integration package"""
from integrations.imap.protocols import EmailMessage, IImapClient, ImapConnectionParams

__all__ = ['EmailMessage', 'IImapClient', 'ImapConnectionParams']
