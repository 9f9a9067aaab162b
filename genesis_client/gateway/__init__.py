"""
Genesis contract gateway: provider / contract capabilities, the embedded ABI,
the web3 adapter and the gateway operations (import from the submodules).
"""
