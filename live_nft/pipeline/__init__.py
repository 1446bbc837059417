"""
Token Update Pipeline

Linear, one call at a time:
1. Fetch - live data from the configured source
2. Render - text over the template image, saved to the output directory
3. Upload - image to IPFS through the chain SDK
4. Submit - token properties written on chain
"""
