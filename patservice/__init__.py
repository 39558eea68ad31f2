"""Repository access token issuance, listing and revocation."""
