"""GraphQL query templates for the Trader Joe subgraphs."""

LATEST_BLOCK_QUERY = """
query indexingStatusForCurrentVersion($subgraphName: String, $network: String) {
  indexingStatusForCurrentVersion(subgraphName: $subgraphName) {
    chains(network: $network) {
      network
      latestBlock {
        hash
        number
      }
    }
  }
}
"""

USER_VEJOE_QUERY = """
query users($id: String, $latestBlock: Int) {
  user(id: $id, block: {number: $latestBlock}) {
    veJoeBalance
  }
}
"""

# users(first: 1) keeps the response bounded: only the tracked participant
USER_BALANCE_QUERY = """
query masterChef($id: String, $address: String, $latestBlock: Int) {
  masterChef(id: $id, block: {number: $latestBlock}) {
    totalAllocPoint
    pools(first: 1000) {
      id
      pair
      allocPoint
      balance
      jlpBalance
      users(first: 1, where: {address: $address}) {
        amount
      }
    }
  }
}
"""

BOOSTED_PAIRS_QUERY = """
query($idList: [String], $latestBlock: Int) {
  pairs(first: 1000, where: {id_in: $idList}, block: {number: $latestBlock}) {
    id
    name
    reserveUSD
    totalSupply
  }
}
"""

JOE_YYJOE_PAIR_QUERY = """
query($id: String, $latestBlock: Int) {
  pair(id: $id, block: {number: $latestBlock}) {
    id
    name
    reserve0
    reserve1
    reserveUSD
  }
}
"""
