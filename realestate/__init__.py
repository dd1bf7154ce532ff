"""
Real Estate Listings API package.
"""
