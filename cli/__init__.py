"""Command line front end for chainmlp."""
