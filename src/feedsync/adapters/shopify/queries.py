"""GraphQL documents sent to the Shopify Admin API."""

from __future__ import annotations

from typing import Final

PRODUCT_FIELDS: Final[str] = """
fragment ProductFields on Product {
  id
  title
  descriptionHtml
  vendor
  productType
  updatedAt
  options { id name position values }
  media(first: 50) {
    nodes {
      id
      alt
      ... on MediaImage { image { url } }
    }
  }
  metafields(first: 50) { nodes { namespace key value type } }
  variants(first: 10) {
    nodes {
      id
      sku
      price
      selectedOptions { name value }
      inventoryItem {
        id
        inventoryLevels(first: 20) {
          nodes {
            location { id }
            quantities(names: ["available"]) { name quantity }
          }
        }
      }
    }
  }
}
"""

USER_ERRORS: Final[str] = "userErrors { field message }"

GET_PRODUCT: Final[str] = (
    """
query GetProduct($id: ID!) {
  product(id: $id) { ...ProductFields }
}
"""
    + PRODUCT_FIELDS
)

FIND_VARIANT_BY_SKU: Final[str] = (
    """
query FindVariantBySku($query: String!) {
  productVariants(first: 5, query: $query) {
    nodes { sku product { ...ProductFields } }
  }
}
"""
    + PRODUCT_FIELDS
)

LIST_PRODUCTS: Final[str] = (
    """
query ListProducts($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    nodes { ...ProductFields }
    pageInfo { hasNextPage endCursor }
  }
}
"""
    + PRODUCT_FIELDS
)

CREATE_PRODUCT: Final[str] = (
    f"""
mutation CreateProduct($product: ProductCreateInput!, $media: [CreateMediaInput!]) {{
  productCreate(product: $product, media: $media) {{
    product {{ ...ProductFields }}
    {USER_ERRORS}
  }}
}}
"""
    + PRODUCT_FIELDS
)

UPDATE_PRODUCT: Final[str] = f"""
mutation UpdateProduct($product: ProductUpdateInput!) {{
  productUpdate(product: $product) {{
    product {{ id }}
    {USER_ERRORS}
  }}
}}
"""

DELETE_PRODUCT: Final[str] = f"""
mutation DeleteProduct($input: ProductDeleteInput!) {{
  productDelete(input: $input) {{
    deletedProductId
    {USER_ERRORS}
  }}
}}
"""

UPDATE_VARIANTS: Final[str] = f"""
mutation UpdateVariants($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {{
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {{
    productVariants {{ id }}
    {USER_ERRORS}
  }}
}}
"""

CREATE_MEDIA: Final[str] = f"""
mutation CreateMedia($productId: ID!, $media: [CreateMediaInput!]!) {{
  productCreateMedia(productId: $productId, media: $media) {{
    media {{ id }}
    mediaUserErrors {{ field message }}
  }}
}}
"""

DELETE_MEDIA: Final[str] = f"""
mutation DeleteMedia($productId: ID!, $mediaIds: [ID!]!) {{
  productDeleteMedia(productId: $productId, mediaIds: $mediaIds) {{
    deletedMediaIds
    mediaUserErrors {{ field message }}
  }}
}}
"""

CREATE_OPTIONS: Final[str] = f"""
mutation CreateOptions($productId: ID!, $options: [OptionCreateInput!]!) {{
  productOptionsCreate(
    productId: $productId
    options: $options
    variantStrategy: LEAVE_AS_IS
  ) {{
    product {{ id }}
    {USER_ERRORS}
  }}
}}
"""

DELETE_OPTIONS: Final[str] = f"""
mutation DeleteOptions($productId: ID!, $options: [ID!]!) {{
  productOptionsDelete(productId: $productId, options: $options, strategy: DEFAULT) {{
    deletedOptionsIds
    {USER_ERRORS}
  }}
}}
"""

SET_INVENTORY: Final[str] = f"""
mutation SetInventory($input: InventorySetQuantitiesInput!) {{
  inventorySetQuantities(input: $input) {{
    inventoryAdjustmentGroup {{ reason }}
    {USER_ERRORS}
  }}
}}
"""

ACTIVATE_INVENTORY: Final[str] = f"""
mutation ActivateInventory($inventoryItemId: ID!, $locationId: ID!) {{
  inventoryActivate(inventoryItemId: $inventoryItemId, locationId: $locationId) {{
    inventoryLevel {{ id }}
    {USER_ERRORS}
  }}
}}
"""

VARIANT_INVENTORY: Final[str] = """
query VariantInventory($id: ID!) {
  productVariant(id: $id) {
    id
    inventoryItem {
      id
      inventoryLevels(first: 20) {
        nodes {
          location { id }
          quantities(names: ["available"]) { name quantity }
        }
      }
    }
  }
}
"""

LIST_LOCATIONS: Final[str] = """
query ListLocations {
  locations(first: 50) { nodes { id isActive } }
}
"""

ADD_TO_COLLECTION: Final[str] = f"""
mutation AddToCollection($id: ID!, $productIds: [ID!]!) {{
  collectionAddProducts(id: $id, productIds: $productIds) {{
    collection {{ id }}
    {USER_ERRORS}
  }}
}}
"""

REMOVE_FROM_COLLECTION: Final[str] = f"""
mutation RemoveFromCollection($id: ID!, $productIds: [ID!]!) {{
  collectionRemoveProducts(id: $id, productIds: $productIds) {{
    job {{ id }}
    {USER_ERRORS}
  }}
}}
"""

PRODUCT_COLLECTIONS: Final[str] = """
query ProductCollections($id: ID!) {
  product(id: $id) {
    collections(first: 100) { nodes { id } }
  }
}
"""

LIST_COLLECTIONS: Final[str] = """
query ListCollections($first: Int!, $after: String) {
  collections(first: $first, after: $after) {
    nodes { id title }
    pageInfo { hasNextPage endCursor }
  }
}
"""

CREATE_COLLECTION: Final[str] = f"""
mutation CreateCollection($input: CollectionInput!) {{
  collectionCreate(input: $input) {{
    collection {{ id title }}
    {USER_ERRORS}
  }}
}}
"""
