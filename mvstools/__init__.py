"""Dataset catalog, FTP protocol helpers, SMTP mailer and web application helpers."""

__version__ = "0.1.0"