"""
    pg_importdoc
    ------------

    Module that let users import a whole document (XML, TEXT or BYTEA)
    into PostgreSQL as the single parameter ($1) of an SQL command.

    Use the command:
        $ python3 -m pg_importdoc -c 'INSERT INTO docs(body) VALUES ($1)' DBNAME < doc.xml

    to run the main program of this module.
"""
from .importdoc import main, import_document
