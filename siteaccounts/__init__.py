"""
Site accounts panel.

The site accounts panel is a Flask application that provides the external
user interface through which operators of the federated service directory
log in, register, manage and edit their accounts, configure their sites and
get in touch with the directory administrators.

Context
-------
Operators and their sites are registered with the directory service
(Mentix), which is the authoritative source for the list of known operators
and the sites each of them runs. The panel never writes to the directory; it
queries it on every page render and merges the results with the operator
record attached to the visitor's session.

Authentication and session management happen upstream. By the time a request
reaches the panel, the session layer has already determined whether a user
is logged in, and the panel only decides which page the visitor may see and
assembles the data that page is rendered with.

Site configurations carry test client credentials that are stored encrypted.
They are decrypted with the process-wide credentials passphrase, only on a
per-request copy of the operator record, so that the operator can see them
in the sites page.
"""
