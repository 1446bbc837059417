"""
Live NFT Updater

Fetches live data, renders it onto the token image, uploads the image to
IPFS and writes the result into the properties of an NFT.
"""

__version__ = "1.0.0"
