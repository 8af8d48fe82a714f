ACCOUNT_QUERY = """
query Account($request: AccountRequest!) {
  account(request: $request) {
    address
    username {
      value
    }
    metadata {
      name
      bio
      picture
      coverPicture
    }
  }
}
"""

STATS_QUERY = """
query AccountStats($address: EvmAddress!) {
  accountStats(request: { account: $address }) {
    feedStats {
      posts
      comments
      reposts
      quotes
      reactions
      collects
      tips
    }
    graphFollowStats {
      followers
      following
    }
  }
}
"""

POSTS_QUERY = """
fragment Account on Account {
  username {
    value
  }
  metadata {
    name
    picture
  }
}

fragment App on App {
  metadata {
    name
    logo
    url
  }
}

fragment Post on Post {
  id
  author {
    ...Account
  }
  timestamp
  app {
    ...App
  }
  metadata {
    __typename
    ... on TextOnlyMetadata {
      content
    }
    ... on ArticleMetadata {
      title
      content
      attributes {
        key
        value
      }
    }
    ... on ImageMetadata {
      title
      content
      image {
        item
      }
    }
    ... on VideoMetadata {
      title
      content
      video {
        item
        cover
        duration
        type
      }
    }
    ... on AudioMetadata {
      title
      content
      audio {
        item
        cover
        duration
        artist
        genre
        credits
        type
      }
    }
  }
  stats {
    comments
    reposts
    quotes
    reactions
    collects
  }
}

fragment Repost on Repost {
  id
  author {
    ...Account
  }
  timestamp
  app {
    ...App
  }
  repostOf {
    ...Post
  }
}

query Posts($authors: [EvmAddress!]) {
  posts(request: { filter: { authors: $authors } }) {
    items {
      ... on Post {
        ...Post
      }
      ... on Repost {
        ...Repost
      }
    }
    pageInfo {
      prev
      next
    }
  }
}
"""


def account_variables(local_name: str, namespace: str) -> dict:
    return {"request": {"username": {"localName": local_name, "namespace": namespace}}}


def stats_variables(address: str) -> dict:
    return {"address": address}


def posts_variables(address: str) -> dict:
    return {"authors": [address]}
