"""Exceptions, HTML tree and HTTP plumbing shared by the fetch layer."""
