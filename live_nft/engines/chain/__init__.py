"""
Chain SDK access: REST client, signer and address helpers.
"""
