"""Mail actions (IMAP, POP3 and SMTP)."""
