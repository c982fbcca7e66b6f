"""Services package: file parsing, column mapping, row processing, import session and importer."""
