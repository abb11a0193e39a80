"""LDAP lookup of SSH public keys."""
