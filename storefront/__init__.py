"""
Client storefront: catalogue, panier et checkout avec redirection vers un processeur
de paiement externe, puis réconciliation du paiement au retour.
"""
